"""Shell commands exposing ArrowFrame functionalities.

This module contains the shell commands that can be used to interact with ArrowFrame.

Extrema
=======

``arrowframe-extrema`` counts the local minima (or maxima) of a column of a file,
for each group of rows::

    arrowframe-extrema readings.csv --value temperature --by sensor --order-by timestamp

It can be tested against provided example data running it with the following command::

    arrowframe-extrema examples/data/readings.csv --value value --by sensor --order-by day

"""
