"""ROS resource-state accessor.

Fetches, polls and tags Resource Orchestration Service objects (stacks,
change sets, stack groups, stack instances, templates, template
scratches) over the RPC API, and exposes single-shot state refresh
predicates for an external convergence loop.
"""

__version__ = "0.1.0"
