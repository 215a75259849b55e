#
# Runner UI
#
# console_ui prints the plan and the progress for setup-kiosk.
# virtual_ui keeps quiet and only remembers, for tests.
#
import abc
import sys
from ..lib.timeutil import in_seconds
from .run_state import RunState, RUN_STATE


class ops_ui(object, metaclass=abc.ABCMeta):

  @abc.abstractmethod
  def report_tasks(self, runner_id, current_time, run_estimate, tasks):
    '''Explains the plan without running it.'''
    pass

  @abc.abstractmethod
  def report_task_progress(self, runner_id, current_time, run_estimate, run_time, task, tasks):
    '''A task starts.'''
    pass

  @abc.abstractmethod
  def report_task_failure(self, runner_id, current_time, run_time, task):
    pass

  @abc.abstractmethod
  def report_task_success(self, runner_id, current_time, run_time, task):
    pass

  @abc.abstractmethod
  def report_run_progress(self, runner_id, current_time, runner_state, run_estimate, run_time, step, tasks):
    '''runner_state is a RunState'''
    pass

  def report_skipped_tasks(self, runner_id, tasks):
    pass

  @abc.abstractmethod
  def log(self, runner_id, msg):
    pass

  def task_log(self, runner_id, task, msg):
    self.log(runner_id, "(%s) %s" % (task.description, msg))
    pass
  pass


class console_ui(ops_ui):
  def __init__(self, out=None, err=None):
    self.out = out if out is not None else sys.stdout
    self.err = err if err is not None else sys.stderr
    pass

  def _print(self, msg, stream=None):
    print(msg, file=stream if stream is not None else self.out)
    pass

  def report_tasks(self, runner_id, current_time, run_estimate, tasks):
    for index, task in enumerate(tasks, 1):
      self._print("%2d. %s\n      %s" % (index, task.description, task.explain()))
      pass
    self._print("%d tasks, about %d seconds." % (len(tasks), in_seconds(run_estimate)))
    pass

  def report_task_progress(self, runner_id, current_time, run_estimate, run_time, task, tasks):
    self._print("[%d/%d] %s" % (task.task_number + 1, len(tasks), task.description))
    pass

  def report_task_failure(self, runner_id, current_time, run_time, task):
    self._print("%s: %s failed after %d seconds." % (runner_id, task.description,
                                                     in_seconds(task.end_time - task.start_time)), self.err)
    for verdict in task.verdict:
      self._print("    " + verdict.rstrip().replace("\n", "\n    "), self.err)
      pass
    pass

  def report_task_success(self, runner_id, current_time, run_time, task):
    # Process tasks only say "Finished". Python tasks say what they changed.
    if task.message and task.message not in ("finished.", "Finished"):
      self._print("      %s" % task.message)
      pass
    pass

  def report_run_progress(self, runner_id, current_time, runner_state, run_estimate, run_time, step, tasks):
    self._print("%s: %s. %d of %d tasks in %d seconds." % (runner_id, RUN_STATE[runner_state.value],
                                                           step, len(tasks), in_seconds(run_time)))
    pass

  def report_skipped_tasks(self, runner_id, tasks):
    self._print("Not run:", self.err)
    for task in tasks:
      self._print("    %s" % task.description, self.err)
      pass
    pass

  def log(self, runner_id, msg):
    self._print("%s: %s" % (runner_id, msg))
    pass
  pass


class virtual_ui(ops_ui):
  def __init__(self):
    self.state = RunState.Initial
    self.messages = []
    self.skipped = []
    pass

  def report_tasks(self, runner_id, current_time, run_estimate, tasks):
    pass

  def report_task_progress(self, runner_id, current_time, run_estimate, run_time, task, tasks):
    pass

  def report_task_failure(self, runner_id, current_time, run_time, task):
    self.state = RunState.Failed
    pass

  def report_task_success(self, runner_id, current_time, run_time, task):
    pass

  def report_run_progress(self, runner_id, current_time, runner_state, run_estimate, run_time, step, tasks):
    self.state = runner_state
    pass

  def report_skipped_tasks(self, runner_id, tasks):
    self.skipped = [task.description for task in tasks]
    pass

  def log(self, runner_id, msg):
    self.messages.append(msg)
    pass
  pass
