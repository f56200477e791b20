"""
CLI command implementations, one module per subcommand.
"""
