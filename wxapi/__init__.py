"""Django project exposing the weather gateway over HTTP."""
