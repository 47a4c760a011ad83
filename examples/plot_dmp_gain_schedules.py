"""
=======================
DMP with Gain Schedules
=======================

A DMP learns a trajectory together with a stiffness gain for each
dimension. The gains are given as misc data of the demonstration and are
reproduced as a function of the phase, both in stepwise execution and in
the analytical solution.
示教轨迹与增益一起学习，增益是相位的函数。
"""
print(__doc__)


import matplotlib.pyplot as plt
import numpy as np
from scheduled_primitives.dmp import DMP, DMPWithGainSchedules
from scheduled_primitives.function_approximators import (
    FunctionApproximatorRBFN)
from scheduled_primitives.trajectory import generate_polynomial_trajectory


# 示教轨迹数据创建
T = np.linspace(0.0, 1.0, 101)
demonstration = generate_polynomial_trajectory(
    T, np.zeros(2), np.zeros(2), np.zeros(2), np.array([1.0, 0.5]),
    np.zeros(2), np.zeros(2))
gains = np.column_stack((100.0 + 400.0 * np.sin(np.pi * T) ** 2,
                         200.0 - 150.0 * T))
demonstration.misc = gains

dmp = DMP(n_dims=2, function_approximators=[
    FunctionApproximatorRBFN(n_basis_functions=20)] * 2)
dmp_gains = DMPWithGainSchedules(
    dmp, [FunctionApproximatorRBFN(n_basis_functions=15)] * 2)
dmp_gains.train(demonstration)

# stepwise execution with preallocated arrays
dt = 0.01
x, xd, g = dmp_gains.integrate_start()
x_updated = np.empty_like(x)
xd_updated = np.empty_like(xd)
Y = [np.copy(x[:2])]
G = [np.copy(g)]
for _ in range(len(T) - 1):
    dmp_gains.integrate_step(dt, x, x_updated, xd_updated, g)
    x[:] = x_updated
    Y.append(np.copy(x[:2]))
    G.append(np.copy(g))
Y = np.array(Y)
G = np.array(G)

reproduction = dmp_gains.analytical_trajectory(T)

# 绘图
plt.figure(figsize=(10, 6))
for d in range(2):
    ax = plt.subplot(2, 2, 1 + d)
    ax.set_title(f"Dimension {d + 1}")
    ax.set_ylabel("Position")
    ax.plot(T, demonstration.ys[:, d], label="Demo")
    ax.plot(T, reproduction.ys[:, d], label="Analytical")
    ax.plot(T, Y[:, d], "--", label="Stepwise")
    ax.legend()
    ax = plt.subplot(2, 2, 3 + d)
    ax.set_xlabel("Time")
    ax.set_ylabel("Gain")
    ax.plot(T, demonstration.misc[:, d])
    ax.plot(T, reproduction.misc[:, d])
    ax.plot(T, G[:, d], "--")
plt.tight_layout()
plt.show()
