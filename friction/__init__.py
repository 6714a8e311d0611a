"""
Friction
========

An interactive simulation of the microscopic picture of friction.

A chemistry book rests on a physics book.  Dragging the top book while
the two touch rubs their surface atoms together:

  - Rubbing raises the atoms' vibration amplitude (temperature)
  - The amplitude cools geometrically back toward room temperature
  - Above the evaporation limit, atoms of the top book break away,
    one random atom at a time, lowest row first
  - Every atom that breaks away carries off a little heat and, once a
    row is gone, the gap between the books widens

The simulation features:
  - A headless model publishing its state as Qt signals
  - Rubbing and cooling sound generators (numpy noise synthesis)
  - Screen-reader style narration of temperature changes
  - Mouse and keyboard dragging
"""

__version__ = "1.0.0"
__author__ = "Friction Simulator"
