class DummyClass:
    def __init__(self, value):
        self.value = value


export = DummyClass
