from leetsync.consts import VERSION

__version__ = VERSION
