"""Bundle impact bot — GitHub side of the pipeline.

Runs as a GitHub Action that keeps one section of the PR description current:
  - Changed files from the PR diff
  - Pull request identity and description storage via `gh api`
  - The orchestrating `run(env)`
"""
