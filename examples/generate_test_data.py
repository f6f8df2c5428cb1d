import csv
import math
import os
import random

if not os.path.exists("data"):
    os.mkdir("data")

if not os.path.exists("data/readings.csv"):
  # Daily readings of a few sensors, each one a noisy wave
  # so that every series has some local minima and maxima.
  sensors = ["north", "south", "east", "west"]
  readings = []
  for sensor in sensors:
    phase = random.uniform(0, math.pi)
    for day in range(365):
      value = 20 + 10 * math.sin(day / 15 + phase) + random.uniform(-1, 1)
      readings.append([sensor, day, round(value, 1)])

  # Shuffle the rows, the analysis has to sort them by day.
  random.shuffle(readings)

  with open("data/readings.csv", "w", newline="") as f:
    writer = csv.writer(f)
    writer.writerow(["sensor", "day", "value"])
    writer.writerows(readings)
