#
# Console autologin on tty1
#
from ..lib.unit_file import unit_file
from ..config.config_tasks import task_write_file


def generate_autologin_dropin(user_name):
  dropin = unit_file("autologin.conf")
  # The empty ExecStart= clears the one from getty@.service.
  dropin.add("Service", "ExecStart", "")
  dropin.add("Service", "ExecStart", "-/sbin/agetty --autologin %s --noclear %%I $TERM" % user_name)
  dropin.add("Service", "Type", "idle")
  return dropin.generate()


def config_autologin_tasks(context):
  path = context.path(context.config.SYSTEMD_DIR + "/getty@tty1.service.d/autologin.conf")
  return [task_write_file("Configure console autologin", path, generate_autologin_dropin(context.user.name))]
