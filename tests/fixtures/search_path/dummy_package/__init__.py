export = "package"
