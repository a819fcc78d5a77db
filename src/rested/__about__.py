__version__ = "0.1.0"
__author__ = "rested contributors"
__copyright__ = "2024, rested contributors"
__description__ = (
    "Resources and lazily fetched representations for RESTful HTTP APIs"
)
