# learnassist

The storage and request-handling core of a classroom learning assistant.
It keeps track of users (administrators, teachers and students), classes,
courses and their subjects, assignments and submissions, course favourites,
and the history of conversations with a chat assistant. It also holds a
small on-disk key/value store for perceptual image hashes.

## What is inside

| Module | Purpose |
| --- | --- |
| `learnassist.consts` | User types, grade names and grade groups |
| `learnassist.responses` | The uniform `{code, msg, data}` response envelope and error codes |
| `learnassist.routes` | The front-end route table and filtering it by role |
| `learnassist.schema` | SQLAlchemy models for every table |
| `learnassist.database` | Connection URLs, engine creation, migrations and sessions |
| `learnassist.dal.assignments` | Creating, listing, paging and deleting assignments |
| `learnassist.dal.classes` | Classes and the teachers bound to them |
| `learnassist.dal.conversations` | Assistant conversations and their messages |
| `learnassist.dal.courses` | Courses, subjects, view counts and favourites |
| `learnassist.dal.submissions` | Assignment submissions and their evaluation |
| `learnassist.dal.users` | User accounts |
| `learnassist.dal.media` | Image hashes, media records and chat messages |
| `learnassist.hashstore` | Named on-disk stores of image hash values |

## Connecting to a database

`build_mysql_url` assembles a MySQL connection URL from its parts;
`connect` opens an engine and creates any missing tables, and
`make_session` gives a session bound to it. Any SQLAlchemy URL works, so
SQLite is handy for local work:

```python
from learnassist.database import connect, make_session

engine = connect("sqlite:///learning.db")
session = make_session(engine)
```

Lookups that find nothing where a record must exist raise
`learnassist.database.RecordNotFound`.

## Working with the data

```python
from datetime import datetime

from learnassist.dal import assignments, classes, courses

math = courses.create_subject(session, "Mathematics")
course = courses.create_course_with_subjects(
    session, "Fractions", 1, 1, "An introduction", "", [math.id], 90, "",
)
print(course.duration())      # "01小时30分钟"

klass = classes.create_class(session, "Class A", "初一", "A1B2C3")
assignments.create_assignment(
    session, "Exercise 1", "Pages 3 to 5", course.id, 1, klass.id,
    datetime(2025, 5, 1, 23, 59),
)
page, total = assignments.get_assignments_by_class_page(session, klass.id, 1, 10)
```

Paged queries take a 1-based page number and a page size and return the
rows of that page together with the total count.

## Route tables by role

```python
from learnassist.routes import routes_for_roles_json

for route in routes_for_roles_json('["teacher"]'):
    print(route.to_dict())
```

Routes with no roles are visible to everyone; nested children are
filtered the same way.

## Response envelopes

`learnassist.responses` builds the `{code, msg, data}` body every endpoint
answers with: `success(data)`, `request_failure(msg, code)`,
`params_failure()`, `auth_failure()` and `panic_failure(msg)`, each giving
a `Resp` whose `to_dict()` is ready to serialise.

## Image hash stores

`learnassist.hashstore.Repository` opens named `HashStore`s on demand,
keeps them open while in use and closes idle ones. A store maps image ids
to `HashValue`s with `get`, `set` and `find_all`; `close_all` releases
every open store.