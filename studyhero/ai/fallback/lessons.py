"""Deterministic lesson templates used when no remote provider answers.

Dispatch is a case-insensitive substring match on the subject name, checked in
the order of `SUBJECT_KEYWORDS`; anything unmatched gets the generic template.
Subject and topic are capitalised and interpolated into the template strings,
so the same inputs always yield the same lesson.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from studyhero.schema.content import Activity, Example, LessonContent, LessonWithSources, TextbookReference, VisualAid, WebContentSource

DEFAULT_SUBJECT = "General Studies"
DEFAULT_TOPIC = "Core Concepts"


def capitalize_first(value: str) -> str:
  """Upper-case the first character only, leaving the rest untouched."""
  return value[:1].upper() + value[1:]


def _lesson(
  title: str,
  *,
  key_points: list[str],
  explanation: list[str],
  examples: list[tuple[str, str]],
  visual_aids: list[tuple[str, str, str]],
  activities: list[tuple[str, str, str]],
  summary: str,
  facts: list[str],
  references: list[tuple[str, str, str]],
) -> LessonContent:
  return LessonContent(
    title=title,
    key_points=key_points,
    explanation=explanation,
    examples=[Example(title=name, content=body) for name, body in examples],
    visual_aids=[VisualAid(title=name, description=body, visual_type=kind) for name, body, kind in visual_aids],
    activities=[Activity(title=name, instructions=steps, learning_outcome=outcome) for name, steps, outcome in activities],
    summary=summary,
    interesting_facts=facts,
    textbook_references=[TextbookReference(chapter=chapter, page_numbers=pages, description=body) for chapter, pages, body in references],
  )


def _math_lesson(subject: str, topic: str) -> LessonContent:
  return _lesson(
    f"{subject}: {topic}",
    key_points=[
      f"{topic} is built from precise definitions that must be learned exactly",
      f"Every result in {topic} follows from rules that can be proved step by step",
      f"Worked examples reveal the patterns behind {topic}",
      f"Checking answers by substitution or estimation catches most mistakes in {topic}",
      f"{topic} connects to other areas of {subject} such as algebra and geometry",
    ],
    explanation=[
      f"{topic} is a central idea in {subject}. It gives us a precise language for describing quantities, relationships and patterns.",
      f"To work with {topic}, start from the definitions, then apply the rules one step at a time. Writing every step keeps the reasoning clear and easy to check.",
      f"Problems involving {topic} appear in science, finance and engineering, which is why fluency here pays off well beyond the {subject} classroom.",
    ],
    examples=[
      ("Worked Example", f"A step-by-step solution of a standard {topic} problem, stating the rule used at each step."),
      ("Real-World Problem", f"A word problem where {topic} is used to model a shopping, travel or measurement situation."),
    ],
    visual_aids=[
      ("Concept Map", f"A map linking the definitions, rules and common problem types of {topic}.", "diagram"),
      ("Graph", f"A plotted graph showing how the quantities in {topic} change together.", "chart"),
    ],
    activities=[
      ("Practice Set", f"Solve ten graded {topic} problems, checking each answer by substitution.", f"Fluency with the core procedures of {topic}"),
      ("Error Hunt", f"Find and correct the mistakes in five worked solutions about {topic}.", "Recognising common errors and how to avoid them"),
    ],
    summary=f"{topic} gives {subject} students precise tools for reasoning about quantities. Learn the definitions, practise the procedures and always check your answers.",
    facts=[
      f"Many ideas in {topic} were first written down thousands of years ago.",
      f"Computers rely on ideas like {topic} to run simulations and encrypt data.",
      f"Puzzles and games are often disguised {topic} problems.",
    ],
    references=[("1", "1-20", f"Introduction to {topic} with solved exercises")],
  )


def _physics_lesson(subject: str, topic: str) -> LessonContent:
  return _lesson(
    f"{subject}: {topic}",
    key_points=[
      f"{topic} describes how matter and energy behave",
      f"Physical laws about {topic} are expressed as equations with units",
      f"Experiments and measurements test every claim about {topic}",
      f"Diagrams of forces, fields or rays make {topic} problems easier to solve",
      f"{topic} explains many everyday phenomena around us",
    ],
    explanation=[
      f"{topic} is a part of {subject} that explains how objects move, interact and exchange energy.",
      f"Physicists describe {topic} with quantities such as force, energy and time, and connect them through laws that have been tested by careful experiments.",
      f"When solving {topic} problems, draw a diagram, list the known quantities with units, choose the governing law and only then calculate.",
    ],
    examples=[
      ("Everyday Observation", f"How {topic} explains what happens when a ball is thrown, a bulb lights up or a mirror forms an image."),
      ("Numerical Problem", f"A calculation applying the main equation of {topic}, with units tracked at each step."),
    ],
    visual_aids=[
      ("Labelled Diagram", f"A diagram showing the quantities involved in {topic} and their directions.", "diagram"),
      ("Experiment Setup", f"An illustration of a simple laboratory setup that demonstrates {topic}.", "illustration"),
    ],
    activities=[
      ("Home Experiment", f"Use household objects to observe {topic}, record measurements in a table and describe the pattern.", "Linking observations to physical laws"),
      ("Problem Workshop", f"Solve three numerical problems on {topic}, drawing a diagram for each.", "Applying equations with correct units"),
    ],
    summary=f"{topic} shows how {subject} turns observations into laws. Diagrams, units and careful measurement are the keys to mastering it.",
    facts=[
      f"Engineers use {topic} when designing bridges, vehicles and electronics.",
      f"Some ideas in {topic} were overturned by later experiments, showing how science corrects itself.",
      f"Satellites and smartphones depend on precise applications of {subject}.",
    ],
    references=[("1", "1-25", f"Core laws and worked numericals on {topic}")],
  )


def _chemistry_lesson(subject: str, topic: str) -> LessonContent:
  return _lesson(
    f"{subject}: {topic}",
    key_points=[
      f"{topic} is explained by the behaviour of atoms and molecules",
      f"Chemical equations for {topic} must be balanced",
      f"Properties of substances in {topic} depend on their structure and bonding",
      f"Safety rules apply to every experiment involving {topic}",
      f"{topic} has important uses in industry, medicine and daily life",
    ],
    explanation=[
      f"{topic} is a key area of {subject}, the study of substances and how they change.",
      f"At the particle level, {topic} involves atoms rearranging, bonds breaking and forming, and energy being absorbed or released.",
      f"Writing balanced equations and using correct chemical symbols lets us predict the products and amounts involved in {topic}.",
    ],
    examples=[
      ("Reaction in Daily Life", f"An everyday process, such as cooking or rusting, that illustrates {topic}."),
      ("Balancing Equations", f"A step-by-step balancing of a chemical equation related to {topic}."),
    ],
    visual_aids=[
      ("Particle Model", f"A particle diagram showing what happens to atoms and molecules during {topic}.", "diagram"),
      ("Periodic Table Highlight", f"A periodic table with the elements important to {topic} highlighted.", "chart"),
    ],
    activities=[
      ("Safe Demonstration", f"Observe a teacher-led demonstration of {topic} and record colour, temperature and gas changes.", "Identifying evidence of chemical change"),
      ("Equation Practice", f"Balance eight equations connected to {topic}.", "Conservation of mass in chemical reactions"),
    ],
    summary=f"{topic} shows how {subject} explains change at the level of particles. Balanced equations and careful observation are essential.",
    facts=[
      f"Chemists apply {topic} to develop medicines and new materials.",
      f"Some reactions related to {topic} happen inside your body every second.",
      f"The study of {subject} grew out of early attempts to transform metals.",
    ],
    references=[("1", "1-18", f"Particles, equations and reactions in {topic}")],
  )


def _biology_lesson(subject: str, topic: str) -> LessonContent:
  return _lesson(
    f"{subject}: {topic}",
    key_points=[
      f"{topic} is a process or structure found in living organisms",
      f"Cells are the basic units in which {topic} takes place",
      f"{topic} helps organisms survive, grow and reproduce",
      f"Organ systems work together to support {topic}",
      f"Studying {topic} helps us understand health and the environment",
    ],
    explanation=[
      f"{topic} is an important concept in {subject}, the science of living things.",
      f"To understand {topic}, look at it at several levels: molecules, cells, organs and the whole organism, and at how each level depends on the others.",
      f"Scientists investigate {topic} through observation, microscopy and controlled experiments, which is why diagrams and careful labelling matter so much.",
    ],
    examples=[
      ("Example in Plants", f"How {topic} can be observed in a common plant, with the structures involved labelled."),
      ("Example in Humans", f"How {topic} relates to the human body and everyday health."),
    ],
    visual_aids=[
      ("Labelled Diagram", f"A labelled diagram showing the parts involved in {topic}.", "diagram"),
      ("Process Flowchart", f"A flowchart showing the stages of {topic} in order.", "flowchart"),
    ],
    activities=[
      ("Observation Journal", f"Observe living examples related to {topic} for a week and record your findings with sketches.", "Developing scientific observation skills"),
      ("Model Building", f"Build a simple model that represents {topic} using craft materials.", "Understanding structure and function"),
    ],
    summary=f"{topic} is a fundamental idea in {subject}. It shows how structure and function work together in living organisms.",
    facts=[
      f"Research on {topic} has led to advances in medicine and agriculture.",
      f"Some organisms carry out {topic} in surprising ways.",
      f"Microscopes revealed many details of {topic} that were invisible to early biologists.",
    ],
    references=[("1", "1-22", f"Cells, systems and processes related to {topic}")],
  )


def _history_lesson(subject: str, topic: str) -> LessonContent:
  return _lesson(
    f"{subject}: {topic}",
    key_points=[
      f"{topic} must be understood in its time and place",
      f"Causes and consequences of {topic} are often connected in complex ways",
      f"Primary sources give direct evidence about {topic}",
      f"Different historians may interpret {topic} differently",
      f"{topic} still shapes society today",
    ],
    explanation=[
      f"{topic} is a significant subject within {subject}. Studying it helps us understand how societies change over time.",
      f"Historians reconstruct {topic} from primary sources such as letters, records and artefacts, and from secondary sources written later.",
      f"Comparing perspectives on {topic} helps us judge evidence critically and understand why events unfolded as they did.",
    ],
    examples=[
      ("Primary Source Extract", f"A short extract from a document of the period, with questions about what it reveals about {topic}."),
      ("Cause and Effect", f"A chain of events showing the causes and consequences of {topic}."),
    ],
    visual_aids=[
      ("Timeline", f"A timeline of the key dates and events of {topic}.", "timeline"),
      ("Map", f"A map showing the places connected with {topic}.", "map"),
    ],
    activities=[
      ("Source Analysis", f"Compare two sources about {topic} and explain where they agree and differ.", "Evaluating historical evidence"),
      ("Role Play", f"Prepare a short role play presenting different viewpoints on {topic}.", "Understanding multiple perspectives"),
    ],
    summary=f"{topic} is an important part of {subject}. Examining its causes, events and consequences helps us understand the present.",
    facts=[
      f"Newly discovered documents continue to change what we know about {topic}.",
      f"Museums around the world hold artefacts connected to {topic}.",
      f"Ideas from {topic} still appear in modern laws and institutions.",
    ],
    references=[("1", "1-30", f"Background, events and legacy of {topic}")],
  )


def _computer_lesson(subject: str, topic: str) -> LessonContent:
  return _lesson(
    f"{subject}: {topic}",
    key_points=[
      f"{topic} is a fundamental concept in computing",
      f"Algorithms give precise steps for working with {topic}",
      f"Good programs using {topic} are correct, clear and efficient",
      f"Testing reveals errors in solutions involving {topic}",
      f"{topic} is used in the software and devices we use daily",
    ],
    explanation=[
      f"{topic} is an essential part of {subject}, the study of how information is represented and processed.",
      f"Working with {topic} means breaking a problem into small steps, choosing suitable data structures and expressing the solution as an algorithm.",
      f"Once a solution using {topic} is written, it must be tested with normal, boundary and invalid inputs to make sure it behaves correctly.",
    ],
    examples=[
      ("Pseudocode Walkthrough", f"A short pseudocode algorithm that demonstrates {topic}, traced line by line."),
      ("Real Application", f"How {topic} is used inside a familiar app such as a search engine or a game."),
    ],
    visual_aids=[
      ("Flowchart", f"A flowchart showing the decisions and steps in an algorithm using {topic}.", "flowchart"),
      ("Memory Diagram", f"A diagram showing how data changes while a program using {topic} runs.", "diagram"),
    ],
    activities=[
      ("Coding Exercise", f"Write a small program that uses {topic} and test it with three different inputs.", "Turning an algorithm into working code"),
      ("Unplugged Activity", f"Act out an algorithm involving {topic} with cards, without a computer.", "Understanding algorithms step by step"),
    ],
    summary=f"{topic} is a core idea in {subject}. Clear algorithms, sensible data structures and thorough testing lead to reliable solutions.",
    facts=[
      f"Early computers used {topic} in very different ways from modern machines.",
      f"Efficient use of {topic} can make programs thousands of times faster.",
      f"Many famous software bugs came from small mistakes involving {topic}.",
    ],
    references=[("1", "1-24", f"Concepts, algorithms and exercises on {topic}")],
  )


def _generic_lesson(subject: str, topic: str) -> LessonContent:
  return _lesson(
    f"{subject}: {topic}",
    key_points=[
      f"{topic} is an important concept in {subject}",
      f"{topic} builds on earlier foundations in {subject}",
      f"Understanding the core principles of {topic} supports future learning",
      f"Practical applications of {topic} reinforce theoretical understanding",
      f"Regular revision helps you master {topic}",
    ],
    explanation=[
      f"This lesson provides an overview of {topic} in {subject}.",
      f"Understanding {topic} helps students build a foundation for more advanced concepts in {subject}.",
      f"The study of {topic} combines theoretical knowledge with practical applications.",
    ],
    examples=[
      ("Basic Example", f"A straightforward example demonstrating {topic} and how it applies in real-world situations."),
      ("Advanced Application", f"A more complex application showing how {topic} is used in advanced {subject} contexts."),
    ],
    visual_aids=[
      ("Conceptual Diagram", f"Visual representation showing the key components of {topic}.", "diagram"),
      ("Summary Chart", f"A chart summarising the main ideas of {topic} in {subject}.", "chart"),
    ],
    activities=[
      ("Practice Exercise", f"Complete these exercises related to {topic} to reinforce your understanding.", f"Building practical skills in {topic}"),
      ("Discussion", f"Discuss with a partner where {topic} appears in everyday life.", f"Connecting {topic} to real situations"),
    ],
    summary=f"{topic} is a fundamental concept in {subject} that provides a foundation for advanced study.",
    facts=[
      f"{topic} has interesting historical origins in {subject}.",
      f"{topic} is applied in many modern technologies and fields.",
      f"Recent research has expanded our understanding of {topic}.",
    ],
    references=[("1", "1-15", f"Overview of {topic} in {subject}")],
  )


SUBJECT_KEYWORDS: tuple[tuple[tuple[str, ...], Callable[[str, str], LessonContent]], ...] = (
  (("math",), _math_lesson),
  (("physics",), _physics_lesson),
  (("chemistry",), _chemistry_lesson),
  (("biology",), _biology_lesson),
  (("history", "social"), _history_lesson),
  (("computer",), _computer_lesson),
)


def template_for(subject: str) -> Callable[[str, str], LessonContent]:
  """Return the template chosen for a subject name."""
  lowered = subject.lower()
  for keywords, template in SUBJECT_KEYWORDS:
    if any(keyword in lowered for keyword in keywords):
      return template
  return _generic_lesson


def generate_fallback_lesson(subject: str, topic: str) -> LessonContent:
  """Return the deterministic lesson for a subject/topic pair."""
  subject_name = capitalize_first(subject.strip() or DEFAULT_SUBJECT)
  topic_name = capitalize_first(topic.strip() or DEFAULT_TOPIC)
  return template_for(subject_name)(subject_name, topic_name)


def _slug(value: str) -> str:
  return re.sub(r"\s+", "", value.lower())


def generate_fallback_lesson_with_sources(subject: str, topic: str | None, board: str) -> LessonWithSources:
  """Return the fallback lesson plus generic curriculum resources for the board."""
  lesson = generate_fallback_lesson(subject, topic or subject)
  topic_slug = _slug(topic) if topic else "general"
  subject_slug = _slug(subject)
  focus = topic or subject
  sources = [
    WebContentSource(
      url=f"https://www.{_slug(board)}.edu/resources/{subject_slug}-curriculum",
      title=f"{board} Official {subject} Curriculum Resource",
      relevance=95,
      snippet=f"Official curriculum guidelines for {subject} including standards for {focus}.",
    ),
    WebContentSource(
      url=f"https://www.educational-resources.org/{subject_slug}-lessons",
      title="Educational Resources Archive",
      relevance=88,
      snippet=f"Comprehensive teaching materials for {subject} aligned with various curriculum standards.",
    ),
    WebContentSource(
      url=f"https://www.teacherportal.com/{subject_slug}/lessons/{topic_slug}",
      title="Teacher Portal Lesson Repository",
      relevance=85,
      snippet=f"Peer-reviewed lesson plans and teaching resources for {focus}.",
    ),
  ]
  return LessonWithSources.model_validate({**lesson.to_payload(), "sources": [source.to_payload() for source in sources]})
