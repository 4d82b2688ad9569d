"""Runtime pieces of the loader: request parsing, importing and installing."""
