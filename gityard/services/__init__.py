"""Services used by the gityard core and interactive view."""
