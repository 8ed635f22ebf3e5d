INITIALIZE_LEVEL = "__initialize_level"


def initialize_level(level: int):
    """
    the larger the level, the later the initialization
    """
    def decorator(cls):
        setattr(cls, INITIALIZE_LEVEL, level)
        return cls
    return decorator


def get_initialize_level(obj) -> int:
    return getattr(obj, INITIALIZE_LEVEL, 0)
