export = "Hello"
