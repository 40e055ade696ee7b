"""GrapeSight: staged grape-leaf disease classification."""

__version__ = "0.1.0"
