"""Constants for the BLE soil sensor client."""
from typing import Final

CONF_MAC: Final = "mac"
CONF_DEVICE_TYPE: Final = "device_type"
CONF_COMMAND_TIMEOUT: Final = "command_timeout"
CONF_MAX_BUFFER_SIZE: Final = "max_buffer_size"
CONF_POSITIONAL_ORDER: Final = "positional_order"
CONF_POLL_INTERVAL: Final = "poll_interval"
CONF_RETRY_COUNT: Final = "retry_count"

DEFAULT_DEVICE_TYPE: Final = "soil_tester"
DEFAULT_COMMAND_TIMEOUT: Final = 5.0
DEFAULT_MAX_BUFFER_SIZE: Final = 4096
DEFAULT_POLL_INTERVAL: Final = 60
DEFAULT_RETRY_COUNT: Final = 1

# Wire protocol
COMMAND_PREFIX: Final = "AT+"
COMMAND_SUFFIX: Final = "\r\n"
RESPONSE_TERMINATOR: Final = "\r\nok\r\n"

CMD_MEASURE: Final = "MEA=?"
CMD_DEVICE_INFO: Final = "INFO=?"
CMD_SENSOR_LIST: Final = "SENSOR=?"
CMD_CONFIG: Final = "CONFIG"
CMD_RESTORE: Final = "RESTORE"

MEASUREMENT_COMMANDS: Final = frozenset({CMD_MEASURE})

# Firmware error codes reported in place of a measurement
ERROR_CODE_MEASUREMENT: Final = "2000001"
ERROR_CODE_SENSOR: Final = "2000003"

# Log sink severities
SEVERITY_DEBUG: Final = "debug"
SEVERITY_INFO: Final = "info"
SEVERITY_SUCCESS: Final = "success"
SEVERITY_WARNING: Final = "warning"
SEVERITY_ERROR: Final = "error"
