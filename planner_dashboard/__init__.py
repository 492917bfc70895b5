"""Top-level package for the Zenith planner dashboard.

The primary modules are:

* ``store`` – the planner store and its update operations
* ``persistence`` – load/save of the whole state under one storage key
* ``stats`` – monthly statistics for the dashboard and calendar report
* ``visualization`` – functions that generate Plotly figures
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run planner_dashboard/Home.py
```
"""

from . import models  # noqa: F401  # re-exported for convenience
from . import stats  # noqa: F401  # re-exported for convenience
from . import store  # noqa: F401  # re-exported for convenience
# Streamlit may not be installed in all environments (e.g. during unit
# testing), so the dashboard is optional.
try:
    from . import dashboard  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    dashboard = None  # type: ignore


__all__ = ["models", "stats", "store", "dashboard"]
