# Process exit codes shared by CLI subcommands
OK = 0
INVALID = 1
USER_ERR = 2

__all__ = ["INVALID", "OK", "USER_ERR"]
