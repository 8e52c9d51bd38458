"""
Core application engine for turning upstream releases into packages.

The `ReleaseResolver` maps requested versions to releases, the
`PackageMaterializer` writes one release directory, and the `RunOrchestrator`
drives both for a whole run.
"""
