"""Status dashboard backend for GitHub, dbt Cloud and Prefect Cloud."""

__version__ = "0.1.0"
