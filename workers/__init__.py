# workers/__init__.py
# Background (Qt thread pool) workers
