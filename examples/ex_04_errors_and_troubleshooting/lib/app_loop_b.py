def export(app_loop_a):
    return app_loop_a
