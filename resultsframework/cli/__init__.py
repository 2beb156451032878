# CLI package for the Results Framework Engine
"""
Read-only command line access to stored frameworks.

Commands:
    resultsframework show        : outline with target matrix
    resultsframework indicators  : one line per indicator
    resultsframework normalize   : rewrite a file through the load gate
"""
