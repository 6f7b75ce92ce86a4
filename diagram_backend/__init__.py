"""
Diagram Backend - File persistence and transports for diagram_core.

- file_manager: load/save diagram .svg files
- operations: one load/mutate/save cycle per batch
- main: FastAPI app over the operations
- cli: argparse entry point (`diagram-tool`)
"""
