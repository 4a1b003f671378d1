"""OffsetPanel Web Route Modules.

Each module exports a `router` object (APIRouter instance) that
offsetpanel.web.app includes. Shared dependencies live in
offsetpanel.web.dependencies.
"""
