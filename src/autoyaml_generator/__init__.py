"""Generate yaml-cpp conversion code for C++ declarations marked with `AutoYAML`."""
