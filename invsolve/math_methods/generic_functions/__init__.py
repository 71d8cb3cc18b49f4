# invsolve/math_methods/generic_functions/__init__.py
