from dimagic import dont_inject


@dont_inject
def export(text):
    return text.upper()
