"""Django project package for the VoCare scheduling backend."""
