def export(app_greeting):
    def greet(name):
        return f"{app_greeting}, {name}!"

    return greet
