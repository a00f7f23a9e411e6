"""fastmvc - action-based MVC views and parameter binding for FastAPI"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fastmvc")
except PackageNotFoundError:
    __version__ = "dev"
