"""Domain services shared by several routers."""
