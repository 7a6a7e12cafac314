def export(app_loop_b):
    return app_loop_b
