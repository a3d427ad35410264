"""cicd-bootstrap core modules."""
