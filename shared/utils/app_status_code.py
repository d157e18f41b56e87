class AppStatusCode:
    OPERATION_FAILED = "200"
    OPERATION_ERROR = "201"
    INVALID_INPUT = "202"
    REQUIRED_VALIDATION_ERROR = "203"
    NOT_FOUND = "204"

    # Rate governance
    INVALID_STATE = "300"
    OVERRIDE_CONFLICT = "301"
    UNAUTHORIZED_ACTION = "302"
