class Task:
    """Cost function that evaluates rollouts of a movement primitive.

    The costs of a rollout are returned as an array
    [total, component_1, ..., component_n] with total being the sum of the
    cost components.
    """
    def evaluate_rollout(self, cost_vars, sample=None, task_parameters=None):
        """Compute costs of a rollout.

        Parameters
        ----------
        cost_vars : array, shape (n_steps, n_cost_vars)
            Variables of the rollout that are relevant for the costs.

        sample : array, optional (default: None)
            Parameters of the movement primitive that generated the rollout.

        task_parameters : array, optional (default: None)
            Parameters of the task.

        Returns
        -------
        costs : array, shape (1 + n_cost_components,)
            Total costs followed by the individual cost components.
        """
        raise NotImplementedError()

    @property
    def n_cost_components(self):
        """Number of cost components."""
        raise NotImplementedError()
