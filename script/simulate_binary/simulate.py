#!/usr/bin/env python3
import os
import sys
import json
import time
import configparser
import matplotlib.pyplot as plt
from matplotlib.collections import PatchCollection
from matplotlib.patches import Circle

import hdmc


conf = configparser.ConfigParser()
conf.read('configure.ini')

params = hdmc.Parameters.from_ini('configure.ini')
logger = hdmc.setup_logging(
    conf.get('Logging', 'level', fallback='INFO'),
    conf.get('Logging', 'file', fallback=None),
)
os.makedirs('result', exist_ok=True)
dump_name = os.path.join('result', params.filename)

logger.info(
    f"Box length: {params.box_length:.4f}, "
    f"area fraction: {params.area_fraction:.4f}"
)

start = time.time()
system = hdmc.BinaryHardDisc.from_parameters(params)
try:
    system.fill_hd()
except hdmc.GenerationFailure as err:
    sys.exit(str(err))

print(system)
print(f"Do particles overlap? {system.report_overlap()}")

recorder = hdmc.TrajectoryRecorder(dump_name)
logger.info("Running dynamics")
system.run(params.n_sweeps, params.sample_interval, sampler=recorder)

print(system)
print(f"Do particles overlap? {system.report_overlap()}")
logger.info(f"Done! Time elapsed: {time.time() - start:.3f}s")

with open(os.path.join("result", "box.json"), 'w') as f:
    json.dump(system.get_box(), f)

small, large = system.get_positions()
fig, ax = plt.subplots(figsize=(6, 6))
for pos, d, color in ((small, params.d_small, 'teal'), (large, params.d_large, 'tomato')):
    patches = [Circle(p, d / 2.0) for p in pos]
    ax.add_collection(PatchCollection(
        patches, facecolor=color, edgecolor="k", lw=0.5
    ))
ax.set_xlim(0, params.box_length)
ax.set_ylim(0, params.box_length)
ax.set_aspect('equal')
ax.set_xlabel("X / $\\sigma$")
ax.set_ylabel("Y / $\\sigma$")
plt.tight_layout()
plt.savefig(os.path.join("result", "system_final.png"))
