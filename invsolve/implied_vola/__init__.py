# invsolve/implied_vola/__init__.py
