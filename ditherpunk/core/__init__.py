"""Pipeline orchestration and image I/O."""
