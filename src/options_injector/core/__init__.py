"""
Core Package.

Contains the injection logic:
- Script Tree (tree-sitter parse + validated text splicing)
- Options object lookup and the section merger
- Framework import normalisation
"""
