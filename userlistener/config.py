PROG_NAME = 'user-listener'

DEFAULT_ADDRESS = '127.0.0.1'
DEFAULT_PORT = 6142
DEFAULT_LOG_LEVEL = 'info'
LOG_LEVELS = ['off', 'error', 'warn', 'info', 'debug', 'trace']

# Upper bound on a single line held by the stream reader.
STREAM_LIMIT = 2 ** 24
# Chunk size for reads made under an idle timeout.
READ_CHUNK = 2 ** 16
# Seconds a cancelled handler waits for its peer to finish closing.
CLOSE_GRACE = 1.0

ID_MIN = -2 ** 31
ID_MAX = 2 ** 31 - 1
NO_ADDRESS = '<none>'
