"""ocp-codegen: generate client SDKs from Open Config Protocol schemas."""

__version__ = "1.0.0"
