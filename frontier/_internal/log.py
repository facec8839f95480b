import logging

FORMATTER = logging.Formatter('[%(levelname)s] %(asctime)s %(message)s')

LOGGER_NAME = 'frontier'

all_loggers_map = {}

def stream_handler():
    h = logging.StreamHandler()
    h.setFormatter(FORMATTER)
    return h

def logger():
    global all_loggers_map

    if all_loggers_map.get(LOGGER_NAME):
        return all_loggers_map.get(LOGGER_NAME)
    else:
        logger = logging.getLogger(LOGGER_NAME)
        for h in logger.handlers:
            logger.removeHandler(h)
        logger.propagate = False
        logger.setLevel(logging.INFO)
        logger.addHandler(stream_handler())

        all_loggers_map[LOGGER_NAME] = logger
        return logger

# set_debug switches the shared logger between INFO and DEBUG. Per-URL
# partition keys and resolution timings are only visible in DEBUG.
def set_debug(debug):
    logger().setLevel(logging.DEBUG if debug else logging.INFO)
