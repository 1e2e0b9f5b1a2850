# inventory/services/__init__.py
