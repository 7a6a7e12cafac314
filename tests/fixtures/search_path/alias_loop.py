def export(aliasLoop):  # noqa: N803
    return aliasLoop
