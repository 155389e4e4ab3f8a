# Core package initialization
# Configuration, logging, errors and metrics shared by every layer
