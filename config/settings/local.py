from .base import *  # noqa

DEBUG = os.getenv("DEBUG", "1") == "1"
