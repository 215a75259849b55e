import os


class plan_context:
  """What every setup step needs to build its tasks: the configuration and the kiosk user."""
  def __init__(self, config, user):
    self.config = config
    self.user = user
    pass

  def path(self, path):
    return self.config.target_path(path)

  def home_path(self, *parts):
    return self.config.target_path(os.path.join(self.user.home, *parts))

  @property
  def owner(self):
    return (self.user.uid, self.user.gid)
  pass
