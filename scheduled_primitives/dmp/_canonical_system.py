import numpy as np


def canonical_system_alpha(goal_z, goal_t, start_t):
    r"""Compute parameter alpha of canonical system.  # 计算正则系统的参数 alpha。

    The parameter alpha is computed such that a specific phase value goal_z
    is reached at goal_t. The canonical system is defined according to [1]_.

    Parameters
    ----------
    goal_z : float
        Value of phase variable at the end of the execution (> 0).

    goal_t : float
        Time at which the execution should be done. Make sure that
        goal_t > start_t.

    start_t : float
        Time at which the execution should start.

    Returns
    -------
    alpha : float
        Value of the alpha parameter of the canonical system.

    Raises
    ------
    ValueError
        If input values are invalid.

    References
    ----------
    .. [1] Ijspeert, A. J., Nakanishi, J., Hoffmann, H., Pastor, P., Schaal, S.
       (2013). Dynamical Movement Primitives: Learning Attractor Models for
       Motor Behaviors. Neural Computation 25 (2), 328-373. DOI:
       10.1162/NECO_a_00393
    """
    if goal_z <= 0.0:
        raise ValueError("Final phase must be > 0!")
    if goal_z >= 1.0:
        raise ValueError("Final phase must be < 1!")
    if start_t >= goal_t:
        raise ValueError("Goal must be chronologically after start!")

    return float(-np.log(goal_z))


def phase(t, alpha, goal_t, start_t):
    r"""Map time to phase (closed-form solution of the canonical system).

    The phase variable evolves according to

    .. math::

        \tau \dot{z} = -\alpha_z z

    with :math:`z_0 = 1`, hence

    .. math::

        z(t) = \exp( - \frac{\alpha_z}{\tau} (t - t_0))

    Parameters
    ----------
    t : float or array, shape (n_steps,)
        Time(s).

    alpha : float
        Value of the alpha parameter of the canonical system.

    goal_t : float
        Time at which the execution should be done.

    start_t : float
        Time at which the execution should start.

    Returns
    -------
    z : float or array, shape (n_steps,)
        Value(s) of phase variable.
    """
    execution_time = goal_t - start_t
    return np.exp(-alpha * (np.asarray(t) - start_t) / execution_time)


def phase_derivative(z, alpha, execution_time):
    """Time derivative of the phase variable.

    Parameters
    ----------
    z : float or array
        Current phase.

    alpha : float
        Value of the alpha parameter of the canonical system.

    execution_time : float
        Time constant tau of the canonical system.

    Returns
    -------
    zd : float or array
        Time derivative of phase.
    """
    return -alpha * z / execution_time
