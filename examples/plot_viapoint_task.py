"""
=============
Viapoint Task
=============

A demonstration through a point is generated by the viapoint task and
imitated by a DMP. Random perturbations of the DMP weights are evaluated
with the cost function of the task, the best rollout is displayed.
对 DMP 权重进行随机扰动，并用任务的成本函数评估。
"""
print(__doc__)


import matplotlib.pyplot as plt
import numpy as np
from scheduled_primitives.dmp import DMP
from scheduled_primitives.tasks import TaskViapoint


task = TaskViapoint(viapoint=[0.5, 0.2], viapoint_time=0.5,
                    goal=[1.0, 1.0], goal_time=1.0)
T = np.linspace(0.0, 1.0, 101)
demonstration = task.generate_demonstration(np.array([[0.2, 0.6]]), T)

dmp = DMP(n_dims=2)
dmp.train(demonstration)
initial_weights = dmp.get_weights()

random_state = np.random.RandomState(0)
best_costs = task.evaluate_rollout(dmp.rollout(T))
best_weights = initial_weights
for _ in range(100):
    weights = initial_weights + 100.0 * random_state.randn(dmp.n_weights)
    dmp.set_weights(weights)
    costs = task.evaluate_rollout(dmp.rollout(T))
    if costs[0] < best_costs[0]:
        best_costs, best_weights = costs, weights
dmp.set_weights(best_weights)
best = dmp.analytical_trajectory(T)

print("Costs (total, viapoint, acceleration, goal): %s" % best_costs)

plt.plot(demonstration.ys[:, 0], demonstration.ys[:, 1], label="Demo")
plt.plot(best.ys[:, 0], best.ys[:, 1], label="Best rollout")
plt.scatter(task.viapoint[0], task.viapoint[1], c="k", label="Viapoint")
plt.scatter(task.goal[0], task.goal[1], c="g", label="Goal")
plt.gca().set_aspect("equal", "box")
plt.legend()
plt.show()
