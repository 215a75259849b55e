#
# systemd unit files
#
# [Unit]
# Description=...
# After=labwc.service
#
# [Service]
# ExecStart=...
#
import re


class UnitFileError(ValueError):
  pass


class unit_file:
  """Ordered [Section] / key=value model of a systemd unit file.

  A key may be repeated in a section (Environment=, an empty ExecStart= to reset
  the inherited one), so each section keeps a list of (key, value) pairs.
  """
  section_re = re.compile(r'^\[([A-Za-z][A-Za-z0-9\-]*)\]$')
  entry_re = re.compile(r'^([A-Za-z][A-Za-z0-9\-]*)\s*=\s*(.*)$')

  def __init__(self, name=None):
    self.name = name
    self.sections = []
    self.entries = {}
    pass

  def section(self, section):
    if section not in self.entries:
      self.sections.append(section)
      self.entries[section] = []
      pass
    return self.entries[section]

  def add(self, section, key, value):
    self.section(section).append((key, str(value)))
    return self

  def set(self, section, key, value):
    """Replaces every existing key in the section with one entry."""
    entries = self.section(section)
    entries[:] = [entry for entry in entries if entry[0] != key]
    entries.append((key, str(value)))
    return self

  def get(self, section, key, default=None):
    values = self.get_all(section, key)
    return values[-1] if values else default

  def get_all(self, section, key):
    return [value for k, value in self.entries.get(section, []) if k == key]

  def get_list(self, section, key):
    """Space separated list values (After=, Wants=) merged across entries."""
    result = []
    for value in self.get_all(section, key):
      result.extend(value.split())
      pass
    return result

  def generate(self):
    chunks = []
    for section in self.sections:
      lines = ["[%s]" % section]
      for key, value in self.entries[section]:
        lines.append("%s=%s" % (key, value))
        pass
      chunks.append("\n".join(lines) + "\n")
      pass
    return "\n".join(chunks)

  @classmethod
  def parse(cls, text, name=None):
    unit = cls(name)
    current = None
    continued = None
    for line_no, raw_line in enumerate(text.splitlines(), 1):
      line = raw_line.strip()
      if continued is not None:
        key, value = continued
        if line.endswith('\\'):
          continued = (key, value + " " + line[:-1].strip())
        else:
          unit.add(current, key, (value + " " + line).strip())
          continued = None
          pass
        continue
      if not line or line[0] in '#;':
        continue
      matched = cls.section_re.match(line)
      if matched:
        current = matched.group(1)
        unit.section(current)
        continue
      matched = cls.entry_re.match(line)
      if not matched:
        raise UnitFileError("line %d: not a key=value assignment: %s" % (line_no, raw_line))
      if current is None:
        raise UnitFileError("line %d: assignment outside of a section: %s" % (line_no, raw_line))
      key, value = matched.group(1), matched.group(2)
      if value.endswith('\\'):
        continued = (key, value[:-1].strip())
        continue
      unit.add(current, key, value)
      pass
    if continued is not None:
      raise UnitFileError("unterminated line continuation")
    return unit
  pass
