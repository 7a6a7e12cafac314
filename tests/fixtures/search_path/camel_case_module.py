export = "snake"
