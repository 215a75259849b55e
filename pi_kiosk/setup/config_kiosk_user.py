#
# Group memberships of the kiosk user
#
# seatd, the GPU and input devices are guarded by groups. The user needs to be
# in them for labwc to run without a desktop session.
#
from ..ops.tasks import op_task_command
from ..lib.user_info import user_groups, group_exists


class task_config_groups(op_task_command):
  def __init__(self, description, user_name, groups, **kwargs):
    super().__init__(description, **kwargs)
    self.user_name = user_name
    self.groups = list(groups)
    pass

  def plan_commands(self):
    argvs = []
    for group in self.groups:
      if not group_exists(group):
        argvs.append(['groupadd', '--system', group])
        pass
      pass
    current = user_groups(self.user_name)
    missing = [group for group in self.groups if group not in current]
    if missing:
      argvs.append(['usermod', '-a', '-G', ",".join(missing), self.user_name])
      pass
    return argvs

  def explain(self):
    return "Create missing groups and add %s to %s" % (self.user_name, ",".join(self.groups))
  pass


def config_kiosk_user_tasks(context):
  return [task_config_groups("Configure kiosk user groups", context.user.name, context.config.GROUPS)]
