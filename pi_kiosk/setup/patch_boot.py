#
# Firmware boot files: config.txt and cmdline.txt
#
from ..config.config_tasks import task_patch_boot_config, task_patch_cmdline


def patch_boot_tasks(context):
  config = context.config
  boot_dir = config.find_boot_dir()
  return [
    task_patch_boot_config("Patch %s/config.txt" % boot_dir,
                           context.path(boot_dir + "/config.txt"),
                           config.BOOT_SETTINGS, config.BOOT_SUPPRESSED),
    task_patch_cmdline("Patch %s/cmdline.txt" % boot_dir,
                       context.path(boot_dir + "/cmdline.txt"),
                       flags=config.CMDLINE_FLAGS),
  ]
