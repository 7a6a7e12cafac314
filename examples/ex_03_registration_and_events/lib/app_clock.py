def export(tick_log):
    tick_log.append("tick")
    return len(tick_log)
