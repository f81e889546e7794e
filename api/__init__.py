"""HTTP surface: dependencies, error rendering and routers."""
