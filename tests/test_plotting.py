import matplotlib.pyplot as plt

from pathmpc.control.mpc import MPCResult
from pathmpc.control.plotting import plot_solution


def test_plot_successful_solve():
    result = MPCResult(steering=0.01, acceleration=1.0,
                       predicted_x=[0.0, 0.5, 1.0], predicted_y=[0.0, 0.0, 0.01],
                       cost=3.0, target_speed=49.9)
    ax = plot_solution(result, [5.0, 15.0, 25.0], [0.0, 0.1, 0.3])
    labels = [line.get_label() for line in ax.get_lines()]
    assert "Reference" in labels
    assert "Predicted" in labels
    plt.close(ax.figure)


def test_plot_failed_solve_on_given_axes():
    _, ax = plt.subplots()
    result = MPCResult.failure(30.0, "Infeasible_Problem_Detected")
    assert plot_solution(result, [5.0, 15.0], [0.0, 0.1], ax=ax) is ax
    labels = [line.get_label() for line in ax.get_lines()]
    assert "Predicted" not in labels
    assert "Infeasible_Problem_Detected" in ax.get_title()
    plt.close(ax.figure)
