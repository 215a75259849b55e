#
# Provisioning runner
#
# The plan is the ordered list of tasks. run() applies them one by one.
# The first failure ends the run: later tasks are skipped, except the ones
# marked as teardown. Nothing is rolled back. Every task is idempotent, so
# the fix is to correct the cause and run setup again.
#
import datetime, traceback
from .run_state import RunState, RUN_STATE
from ..lib.timeutil import in_seconds
from ..lib.util import get_kiosk_logger
from .tasks import op_task

klog = get_kiosk_logger()


class Runner:

  def __init__(self, ui, runner_id):
    self.state = RunState.Initial
    self.ui = ui
    self.runner_id = runner_id
    self.tasks = []
    self.task_step = 0
    self.run_estimate = 0
    self.start_time = None
    self.current_time = None
    self.failed_task = None
    self.skipped_tasks = []
    pass

  def _expect_state(self, state):
    if self.state != state:
      raise Exception("%s: run state is %s, not %s" % (self.runner_id, self.get_run_state_name(), RUN_STATE[state.value]))
    pass

  def prepare(self):
    '''Subclasses add their tasks here.'''
    self._expect_state(RunState.Initial)
    self.state = RunState.Prepare
    pass

  def add_task(self, task):
    if not isinstance(task, op_task):
      raise Exception("%s is not an op_task" % repr(task))
    self.tasks.append(task)
    pass

  def preflight(self):
    '''Numbers the tasks and lets each of them see the whole plan.'''
    self._expect_state(RunState.Prepare)
    self.state = RunState.Preflight
    self.current_time = datetime.datetime.now()

    for task_number, task in enumerate(self.tasks):
      task.task_number = task_number
      task.runner = self
      pass

    for task in self.tasks:
      task.preflight(self.tasks)
      pass

    self.run_estimate = sum(task.estimate_time() for task in self.tasks)
    pass

  def explain(self):
    self.ui.report_tasks(self.runner_id, self.current_time, self.run_estimate, self.tasks)
    pass

  def get_run_state_name(self):
    return RUN_STATE[self.state.value]

  def _fail(self, task):
    self.state = RunState.Failed
    if self.failed_task is None:
      self.failed_task = task
      pass
    pass

  def run(self):
    self._expect_state(RunState.Preflight)
    self.state = RunState.Running
    self.start_time = datetime.datetime.now()

    for task in self.tasks:
      if self.state != RunState.Running and not task.teardown_task:
        klog.info("Skipping %s" % task.description)
        self.skipped_tasks.append(task)
        self.task_step += 1
        continue

      try:
        self._run_task(task)
      except Exception:
        # The task itself blew up rather than reporting a failure.
        tb = traceback.format_exc()
        klog.error("Task: %s\n%s" % (task.description, tb))
        self.ui.log(self.runner_id, "%s: internal error. See the log." % task.description)
        task.set_progress(999, 'Task failed due to internal error.')
        task.verdict.append(tb)
        task.teardown()
        self._fail(task)
        pass
      self.task_step += 1
      pass

    if self.state == RunState.Running:
      self.state = RunState.Success
      pass

    self.current_time = datetime.datetime.now()
    self.ui.report_run_progress(self.runner_id, self.current_time, self.state, self.run_estimate,
                                self.current_time - self.start_time, self.task_step, self.tasks)
    if self.skipped_tasks:
      self.ui.report_skipped_tasks(self.runner_id, self.skipped_tasks)
      pass
    klog.info("%s: %s" % (self.runner_id, self.get_run_state_name()))
    pass

  def _run_task(self, task):
    task.setup()
    self.current_time = task.start_time
    self.ui.report_task_progress(self.runner_id, self.current_time, self.run_estimate,
                                 self.current_time - self.start_time, task, self.tasks)
    klog.info("Start: %s" % task.description)

    while task.progress < 100:
      task.poll()
      pass
    task.teardown()

    self.current_time = datetime.datetime.now()
    run_time = self.current_time - self.start_time
    if task.failed:
      self._fail(task)
      klog.error("Failed: %s %s" % (task.description, task.message))
      self.ui.report_task_failure(self.runner_id, self.current_time, run_time, task)
    else:
      klog.info("Done: %s (%.1f seconds) %s" % (task.description, in_seconds(task.end_time - task.start_time), task.message or ""))
      self.ui.report_task_success(self.runner_id, self.current_time, run_time, task)
      pass
    pass

  def log(self, task, msg):
    klog.info("(%s) %s" % (task.description, msg))
    self.ui.task_log(self.runner_id, task, msg)
    pass

  pass
