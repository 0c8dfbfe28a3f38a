"""Build OCI image tarballs for WebAssembly modules and components."""

__version__ = "0.1.0"