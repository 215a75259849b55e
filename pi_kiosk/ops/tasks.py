#
# Tasks: each task is one provisioning operation.
#
# For example, a task is like "apt-get install" or writing a unit file.
#
# The setup step modules create the plan - which is the sequence of tasks.
# The runner runs through the tasks.
#
# progress goes from 0 to 100. Anything above 100 (999) is a failure, and
# message says why.
#
import datetime, subprocess, abc, traceback

from ..lib.util import get_kiosk_logger
from ..lib.timeutil import in_seconds

klog = get_kiosk_logger()


class op_task(object, metaclass=abc.ABCMeta):
  def __init__(self, description, encoding='utf-8', time_estimate=None, **kwargs):
    if not isinstance(description, str):
      raise TypeError("Task description must be a string, not %s" % type(description).__name__)
    self.description = description
    self.encoding = encoding
    # Seconds. The runner adds them up for --explain.
    self.time_estimate = time_estimate
    # Canned messages: progress_finished, progress_nothing, progress_timeout
    self.kwargs = kwargs

    self.runner = None
    self.task_number = None
    self.teardown_task = False

    self.progress = 0
    self.message = None
    self.verdict = []
    self.start_time = None
    self.end_time = None
    pass

  @property
  def failed(self):
    return self.progress > 100

  def preflight(self, tasks):
    """Called once the plan is complete, before anything runs."""
    pass

  def setup(self):
    self.start_time = datetime.datetime.now()
    pass

  def teardown(self):
    self.end_time = datetime.datetime.now()
    if self.start_time:
      self.time_estimate = in_seconds(self.end_time - self.start_time)
      pass
    pass

  def set_teardown_task(self):
    """Teardown tasks run even after an earlier task failed."""
    self.teardown_task = True
    pass

  @abc.abstractmethod
  def poll(self):
    """The runner calls this until progress reaches 100."""
    pass

  @abc.abstractmethod
  def explain(self):
    """One line of what the task is going to do."""
    pass

  def set_progress(self, progress, msg):
    self.progress = progress
    if msg:
      self.message = msg
      if progress >= 100:
        self.verdict.append(msg)
        pass
      pass
    pass

  def estimate_time(self):
    if self.time_estimate is None:
      raise ValueError("%s has no time estimate" % self.description)
    return self.time_estimate

  def log(self, msg):
    if self.runner:
      self.runner.log(self, msg)
    else:
      klog.info("(%s) %s" % (self.description, msg))
      pass
    pass

  def _finish(self, msg=None, default=None):
    self.set_progress(100, msg or self.kwargs.get('progress_finished', default))
    pass

  def _fail(self, msg):
    self.set_progress(999, msg)
    pass
  pass


class op_task_python_simple(op_task):
  """Runs run_python() once.

  A returned string becomes the message. An exception fails the task with
  the exception text.
  """
  def __init__(self, description, time_estimate=1, **kwargs):
    super().__init__(description, time_estimate=time_estimate, **kwargs)
    pass

  @abc.abstractmethod
  def run_python(self):
    pass

  def poll(self):
    try:
      result = self.run_python()
    except Exception as exc:
      klog.debug(traceback.format_exc())
      self._fail("%s: %s" % (self.description, str(exc)))
      return
    self._finish(result if isinstance(result, str) else None, "finished.")
    pass

  def explain(self):
    return "Run " + self.description
  pass


def run_command(argv, env=None, timeout=None):
  """(returncode, stdout, stderr) as bytes. 127 when the command is missing, 124 on timeout."""
  klog.debug("run: " + repr(argv))
  try:
    proc = subprocess.run(argv, stdout=subprocess.PIPE, stderr=subprocess.PIPE, timeout=timeout, env=env)
  except FileNotFoundError:
    return (127, b"", ("%s: command not found" % argv[0]).encode())
  except subprocess.TimeoutExpired:
    return (124, b"", ("%s: timed out after %s seconds" % (argv[0], timeout)).encode())
  return (proc.returncode, proc.stdout, proc.stderr)


class op_task_process(op_task):
  """Runs one command. Success is a return code in good_returncode."""
  def __init__(self, description, argv=None, timeout=None, env=None, **kwargs):
    super().__init__(description, **kwargs)
    self.argv = argv
    self.timeout = timeout
    self.env = env
    self.good_returncode = [0]
    self.returncode = None
    self.out = ""
    self.err = ""
    pass

  def poll(self):
    returncode, out, err = run_command(self.argv, env=self.env, timeout=self.timeout)
    self.returncode = returncode
    self.out = out.decode(self.encoding, errors='replace')
    self.err = err.decode(self.encoding, errors='replace')
    if self.out:
      klog.debug("stdout: " + self.out)
      pass
    if self.err:
      klog.debug("stderr: " + self.err)
      pass

    if returncode in self.good_returncode:
      self._finish(default="Finished")
    elif returncode == 124:
      self._fail(self.kwargs.get('progress_timeout', self.err))
    else:
      self._fail("Failed with return code %d\n%s" % (returncode, self.err))
      pass
    pass

  def explain(self):
    if self.argv is None:
      raise ValueError("%s has no command" % self.description)
    return "Execute " + " ".join(str(arg) for arg in self.argv)
  pass


class op_task_process_simple(op_task_process):
  def __init__(self, description, time_estimate=2, **kwargs):
    super().__init__(description, time_estimate=time_estimate, **kwargs)
    pass
  pass


class op_task_command(op_task):
  """Runs a list of quick commands in order. Stops at the first failing one.

  Subclasses override plan_commands() to look at the system state when the task runs.
  """
  def __init__(self, description, argvs=None, env=None, time_estimate=2, **kwargs):
    super().__init__(description, time_estimate=time_estimate, **kwargs)
    self.argvs = argvs if argvs is not None else []
    self.env = env
    self.returncode = None
    pass

  def plan_commands(self):
    return self.argvs

  def format_argv(self, argv):
    """The command line as it goes to the log."""
    return " ".join(argv)

  def poll(self):
    argvs = self.plan_commands()
    if not argvs:
      self._finish(self.kwargs.get('progress_nothing', "Nothing to do."))
      return
    for argv in argvs:
      self.log(self.format_argv(argv))
      returncode, out, err = run_command(argv, env=self.env)
      self.returncode = returncode
      if returncode != 0:
        self._fail("%s failed with return code %d\n%s" % (self.format_argv(argv), returncode,
                                                           err.decode(self.encoding, errors='replace')))
        return
      pass
    self._finish(default="Finished")
    pass

  def explain(self):
    return "Execute %s" % self.description
  pass
