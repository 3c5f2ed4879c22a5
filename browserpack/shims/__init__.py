"""
Global shims for browser delivery.

Node code may reference runtime globals (`process`, `Buffer`) that browsers
do not provide. The table maps each global to the module that polyfills it;
the binder detects which globals a module uses and wraps it accordingly.
"""
