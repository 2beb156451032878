# Results Framework Engine
# Monitoring & evaluation hierarchy for NGO project plans

"""
Objective -> Outcome -> Output -> Indicator.

Every operation returns a new ResultsFramework value. Nothing in this
package performs I/O except the CLI.
"""
