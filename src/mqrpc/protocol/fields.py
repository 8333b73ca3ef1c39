"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling.
"""

CONTENT_TYPE = "application/json"

# Generic commands every service answers
PING = "ping"
INFO = "info"

# Error reply contexts
DISPATCHER = "Message dispatcher"
PUBLISHING = "Answer's publishing error"
EXECUTABLE = "Getting microservice executable stat info error"
