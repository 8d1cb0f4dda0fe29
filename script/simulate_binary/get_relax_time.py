#!/usr/bin/env python3
import os
import json
import configparser
import numpy as np
import matplotlib.pyplot as plt
from scipy.optimize import curve_fit

import hdmc


conf = configparser.ConfigParser()
conf.read('configure.ini')

params = hdmc.Parameters.from_ini('configure.ini')
length = int(conf['ISF']['length'])
q = float(conf['ISF']['q'])
dump_name = os.path.join('result', params.filename)

with open(os.path.join("result", "box.json"), "r") as f:
    box = json.load(f)

with hdmc.XYZ(dump_name) as frames:
    trajectory = [
        frames.get_positions(i, tag=hdmc.Species.LARGE) for i in range(len(frames))
    ]

length = min(length, len(trajectory))
isf = hdmc.analysis.get_isf_2d(trajectory, pbc_box=box, q=q, length=length)
time = np.arange(length)

popt, pcov = curve_fit(
        f=lambda x, tau, b: np.exp(-(x / tau)**b),
        xdata=time,
        ydata=isf,
        p0=(10, 1),
)
tau, b = popt
jump = params.sample_interval
print(f"Relaxation Time of large discs: {tau * jump:.4f} sweeps")

plt.scatter(time, isf, marker='o', color='tomato', fc='none', label='data')
plt.plot(time, np.exp(-(time / tau)**b), color='teal', label='fit')
plt.text(time[len(time)//2], 0.7, "$\\tau=$" + f"{tau * jump:.0f} sweeps")
plt.xlabel(f"Lag Time / {jump} sweeps")
plt.ylabel("ISF")
plt.ylim(-0.1, 1.1)
plt.legend()
plt.tight_layout()
plt.savefig(os.path.join('result', 'isf.pdf'))
