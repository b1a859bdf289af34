"""Prompt templates for every wizard step.

Each builder returns a ``PromptSpec``. Content generated for display is always
requested in the small HTML subset the UI renders (paragraphs, emphasis, lists,
tables); later prompts embed earlier accepted output verbatim.
"""

from __future__ import annotations

import json
from textwrap import dedent
from typing import Any, Dict, List, Sequence

from .llm import PromptSpec
from .markup import strip_html
from .schemas import ProjectData, WorkPlanTask

OPTION_DELIMITER = "<!-- OPTION -->"
VARIANT_DELIMITER = "<!-- VARIANT -->"

MENTOR_SYSTEM_PROMPT = (
    "Eres un mentor académico de diseño que acompaña a estudiantes de taller de título. "
    "Respondes en español, con tono colaborativo y claro."
)
MARKUP_RULES = "Usa HTML simple: <p>, <strong>, <em>, <ul>, <ol>, <li> y, si corresponde, <table>. Sin estilos ni scripts."


def _student(project: ProjectData) -> str:
    return project.profile.nombre if project.profile else "estudiante"


def _pretty_json(data: Any, fallback: str) -> str:
    if not data:
        return fallback
    return json.dumps(data, ensure_ascii=False, indent=2)


# ---------------------------------------------------------------------------
# Steps 1-4
# ---------------------------------------------------------------------------


def welcome_prompt(name: str, pronoun: str, preference: str) -> PromptSpec:
    user_prompt = dedent(
        f"""
        Actúa como 'Ágora', un guía de diseño que utiliza el método socrático (mayéutico): ayudas
        a que cada persona dé a luz sus propias ideas en lugar de entregar respuestas. Tu tono es
        el de un par reflexivo y sereno.

        Un estudiante llamado {name} (pronombres: {pronoun}) comienza su proyecto de título.
        Sus preferencias de aprendizaje son: "{preference or 'aprender haciendo'}".

        Tarea: escribe un mensaje de bienvenida breve y personalizado para {name}.
        1. Salúdalo por su nombre con calidez y preséntate como 'Ágora'.
        2. Explica la metáfora mayéutica: no vienes a enseñar sino a ayudar a descubrir lo que ya sabe.
        3. Invítalo a un viaje de descubrimiento entre pares; inspirador, cercano y claro.
        4. Termina con la pregunta exacta: '¿Qué tema te parece inquietante?'
        Formato: HTML simple con <p>, <strong> y <em>.
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.8, max_tokens=600)


def welcome_fallback(name: str) -> str:
    return (
        f"<p>¡Hola, <strong>{name}</strong>! Te doy la bienvenida a este viaje. Soy <strong>Ágora</strong>, "
        "tu guía en este proceso. Mi propósito no es darte respuestas, sino ayudarte a descubrir las ideas "
        "que ya posees a través del diálogo. Juntos daremos forma a tu proyecto.</p>"
        "<p>¿Qué tema te parece inquietante?</p>"
    )


def theme_exploration_prompt(name: str, topic: str, *, iteration: bool) -> PromptSpec:
    iteration_task = (
        "TAREA: Itera sobre la propuesta anterior. Ofrece 2 nuevos autores o perspectivas alternativas "
        "y contrástalas con las ideas originales."
        if iteration
        else ""
    )
    user_prompt = dedent(
        f"""
        Actúa como un mentor académico experto para {name}, ayudándole a profundizar en su tema: "{topic}".
        {iteration_task}

        Prioridad de fuentes:
        1. Chile: INE, SUBDERE, MINEDUC, Casen, BCN.
        2. Académicas: Scielo, Redalyc, Dialnet.
        3. Otras fuentes abiertas bien citadas.

        Instrucciones obligatorias:
        1. Título en mayúsculas dentro de <h3>, por ejemplo <h3>CITAR Y ROBUSTECER</h3>.
        2. Párrafo introductorio que conecte 3 autores o conceptos clave para "{topic}".
        3. Una o dos citas textuales breves con su referencia APA 7; usa <strong> solo para palabras clave.
        4. Párrafo comparativo: primero similitudes y luego diferencias entre las ideas.
        5. Párrafo que conecte el tema con 2-3 áreas amplias del diseño (estratégico, de interacción,
           social, especulativo, crítico, de experiencias).
        6. Al final, la bibliografía en APA 7 envuelta en <div id="bibliografia">, por ejemplo:
           <div id="bibliografia"><h3>Bibliografía</h3><p>Apellido, N. (Año). <em>Título</em>. Editorial.</p></div>
        {MARKUP_RULES}
        """
    )
    return PromptSpec(user_prompt=user_prompt, system_prompt=MENTOR_SYSTEM_PROMPT)


def disciplinary_scope_prompt(
    name: str,
    topic: str,
    exploration_html: str,
    reflection: str,
    *,
    iteration: bool,
) -> PromptSpec:
    if iteration:
        task = (
            "TAREA DE ITERACIÓN: Itera sobre la propuesta anterior. Ofrece 3 nuevos autores o enfoques "
            "distintos, manteniendo la misma estructura y objetivo."
        )
    else:
        task = dedent(
            """
            TAREA: Busca tres autores relevantes cuya obra se conecte con el ámbito del diseño que mencionó
            el estudiante. Para cada autor:
            1. Resume brevemente su enfoque o postura.
            2. Muestra coincidencias y diferencias entre ellos.
            3. Destaca dónde abren perspectivas nuevas para comprender el tema desde el diseño.
            """
        )
    user_prompt = dedent(
        f"""
        Actúa como un mentor académico experto para {name}.
        Contexto del estudiante:
        * Tema: "{topic}"
        * Exploración previa: "{strip_html(exploration_html)}"
        * Reflexión del estudiante sobre el diseño: "{reflection}"

        {task}

        El objetivo es robustecer la reflexión disciplinar, mostrando cómo el diseño puede expandir o
        transformar su mirada sobre el tema. Respuesta clara, académica y colaborativa.
        {MARKUP_RULES} Usa <strong> solo para conceptos clave y nombres de autores o proyectos.
        """
    )
    return PromptSpec(user_prompt=user_prompt, system_prompt=MENTOR_SYSTEM_PROMPT)


def personal_contribution_prompt(
    name: str,
    topic: str,
    exploration_html: str,
    scope_html: str,
    contribution: str,
    *,
    iteration: bool,
) -> PromptSpec:
    task = (
        "TAREA DE ITERACIÓN: Busca otros autores o enfoques para enriquecer la contribución del estudiante, "
        "manteniendo la estructura y el párrafo final de cierre."
        if iteration
        else "TAREA: Busca autores y enfoques que ayuden a sustentar esa forma de contribuir. Genera una "
        "propuesta enriquecida que incluya un párrafo final de cierre."
    )
    user_prompt = dedent(
        f"""
        Actúa como un mentor académico experto en diseño e investigación. {name} reflexiona sobre cómo su
        proyecto puede contribuir a resolver un problema.

        Contexto del proyecto:
        * Tema: "{topic}"
        * Exploración temática: "{strip_html(exploration_html)}"
        * Ámbito disciplinar y autores relevantes: "{strip_html(scope_html)}"
        * Intención de ayuda del estudiante: "{contribution}"

        {task}

        Estructura obligatoria:
        1. Análisis enriquecido: analiza la idea e introduce 2-3 autores o conceptos que la respalden o
           expandan, explicando cómo se conectan con la intención del estudiante.
        2. Párrafo final de cierre que sintetice el análisis, muestre una respuesta situada y crítica al
           problema y reafirme al diseño como articulador de soluciones transformadoras.
        {MARKUP_RULES} Usa <strong> para autores y conceptos clave.
        """
    )
    return PromptSpec(user_prompt=user_prompt, system_prompt=MENTOR_SYSTEM_PROMPT)


# ---------------------------------------------------------------------------
# Step 5
# ---------------------------------------------------------------------------


def design_variants_prompt(project: ProjectData, gap: str) -> PromptSpec:
    user_prompt = dedent(
        f"""
        Actúa como un estratega de diseño y mentor académico para {_student(project)}.
        Contexto del proyecto:
        - Tema: {project.topic}
        - Exploración: {strip_html(project.theme_exploration_ai_response)}
        - Ámbito de diseño: {strip_html(project.disciplinary_scope_ai_response)}
        - Contribución personal: {project.personal_contribution}

        El estudiante identificó la siguiente brecha u oportunidad de diseño:
        "{gap}"

        TAREA: Conecta esta brecha con el contexto previo y genera exactamente TRES variantes conceptuales
        para abordarla desde el diseño. Cada variante propone un marco de intervención distinto y no supera
        las 140 palabras.
        Separa las tres variantes con el delimitador exacto: {VARIANT_DELIMITER}
        No incluyas títulos ni numeración.
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.9)


def develop_variant_prompt(topic: str, variant: str) -> PromptSpec:
    user_prompt = dedent(
        f"""
        Actúa como un teórico del diseño. Se seleccionó la siguiente variante conceptual para un proyecto
        sobre "{topic}":
        Variante: "{variant}"

        TAREA: Desarrolla esta variante en un párrafo. Profundiza en su sentido, su alcance potencial y su
        relación con el caso del estudiante. Usa HTML simple (<p>, <strong>).
        """
    )
    return PromptSpec(user_prompt=user_prompt)


def reformulate_prompt(text: str) -> PromptSpec:
    user_prompt = dedent(
        f"""
        Actúa como un editor académico. Toma la siguiente reflexión sobre un concepto de diseño y ofrece una
        nueva formulación o un enfoque ligeramente distinto, manteniendo la intención original.
        Reflexión original: "{text}"
        Nueva formulación (HTML simple):
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.9)


# ---------------------------------------------------------------------------
# Step 6
# ---------------------------------------------------------------------------


def project_summary_prompt(project: ProjectData) -> PromptSpec:
    user_prompt = dedent(
        f"""
        Actúa como un sintetizador de información experto. Revisa el trabajo que el estudiante ha hecho
        hasta ahora y redacta un resumen compacto en prosa fluida que servirá de base para el siguiente paso.

        Datos del proyecto:
        * Tema: {project.topic}
        * Exploración temática: {strip_html(project.theme_exploration_ai_response)}
        * Reflexión sobre diseño: {strip_html(project.disciplinary_scope_ai_response)}
        * Contribución personal: {strip_html(project.personal_contribution_ai_response)}
        * Oportunidad de diseño: {strip_html(project.project_gap_analysis)}

        Tarea: entrelaza los puntos clave con coherencia. Usa **títulos en negrita** (por ejemplo **Tema**)
        para separar cada sección. No uses HTML: solo texto plano con markdown para la negrita.
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.5)


def persona_prompt(summary_html: str, needs: str, behaviors: str, pains: str, *, iteration: bool) -> PromptSpec:
    iteration_task = (
        "TAREA DE ITERACIÓN: ofrece una versión alternativa del User Persona, con otro matiz en sus "
        "motivaciones o frustraciones."
        if iteration
        else ""
    )
    user_prompt = dedent(
        f"""
        Actúa como un estratega de diseño y escritor creativo. A partir del resumen del proyecto y de las
        reflexiones del estudiante sobre el usuario, crea un "User Persona" en prosa narrativa para que el
        estudiante identifique a quién entrevistar.
        {iteration_task}

        Resumen del proyecto:
        "{strip_html(summary_html)}"
        Reflexiones sobre el usuario:
        * Necesidades: "{needs}"
        * Comportamientos: "{behaviors}"
        * Frustraciones: "{pains}"

        Incluye: un nombre y un arquetipo, quién es (contexto y rutina), cómo vive el problema, qué siente,
        qué necesita y por qué se beneficiaría de una solución como la que insinúa el proyecto.
        Formato: HTML simple (<p>, <strong>, <em>).
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.9 if iteration else 0.8)


GUIDE_TASKS = {
    "qualitative": (
        "Tarea: genera una pauta de entrevista CUALITATIVA semiestructurada con un objetivo claro, "
        "5-7 preguntas abiertas y de sondeo, y consejos para la escucha activa."
    ),
    "quantitative": (
        "Tarea: genera una propuesta de encuesta CUANTITATIVA con un objetivo claro, 5-7 preguntas "
        "cerradas (opción múltiple, escala Likert) y los indicadores que se podrían obtener."
    ),
}


def interview_guide_prompt(persona_html: str, kind: str, previous_guide: str | None = None) -> PromptSpec:
    if previous_guide:
        task = (
            "Tarea (robustecer): mejora la claridad y el enfoque de las preguntas de la siguiente guía y "
            f"añade una pregunta de sondeo relevante. Guía original: {previous_guide}"
        )
    else:
        task = GUIDE_TASKS[kind]
    user_prompt = dedent(
        f"""
        Actúa como un investigador de UX senior. A partir del siguiente User Persona, crea una pauta de
        entrevista.
        User Persona:
        {strip_html(persona_html)}

        Formato: HTML (<p>, <ul>, <li>, <strong>) con una presentación clara y ordenada.

        {task}
        """
    )
    return PromptSpec(user_prompt=user_prompt)


# ---------------------------------------------------------------------------
# Steps 7-10
# ---------------------------------------------------------------------------


def improve_text_prompt(text: str) -> PromptSpec:
    user_prompt = dedent(
        f"""
        Actúa como un excelente editor académico. Mejora el siguiente texto corrigiendo sintaxis y estilo
        para que sea más claro, conciso y académico, sin alterar su significado central.
        Devuelve solo la versión mejorada, sin comillas ni comentarios.

        Texto original: "{text}"
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.3, max_tokens=400)


def robustify_prompt(name: str, topic: str, text: str) -> PromptSpec:
    user_prompt = dedent(
        f"""
        Actúa como un mentor de investigación creativo para {name}.
        El estudiante redactó la siguiente idea para su proyecto sobre "{topic}":
        Idea: "{text}"

        Tarea: genera exactamente TRES versiones alternativas y robustecidas de esta idea. Cada versión
        tiene un enfoque distinto y no supera las 140 palabras.
        Separa las tres opciones con el delimitador exacto: {OPTION_DELIMITER}
        No agregues numeración ni títulos.
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.9)


def correct_objectives_prompt(objectives: Sequence[str]) -> PromptSpec:
    joined = "\n".join(objectives)
    user_prompt = dedent(
        f"""
        Actúa como un editor académico. Mejora la sintaxis de los siguientes objetivos específicos para que
        sean claros y académicos, manteniendo su significado. Devuelve solo los 3 objetivos, uno por línea.
        Objetivos originales:
        {joined}
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.3, max_tokens=500)


def refine_objectives_prompt(objectives: Sequence[str], general_objective: str, research_question: str) -> PromptSpec:
    user_prompt = dedent(
        f"""
        Actúa como un mentor de investigación. El estudiante tiene estos objetivos: "{', '.join(objectives)}".
        Su objetivo general es "{general_objective}" y su pregunta es "{research_question}".
        TAREA: genera 3 conjuntos de objetivos específicos alternativos.
        Opción 1: ajusta los objetivos para alinearlos mejor con el objetivo general y la pregunta.
        Opción 2: una versión más ambiciosa, alineada con todo el contexto previo del proyecto.
        Opción 3: una versión enfocada en la viabilidad y el impacto a corto plazo.

        Formato: cada opción lista sus 3 objetivos numerados, uno por línea. Separa cada CONJUNTO con el
        delimitador "{OPTION_DELIMITER}".
        Ejemplo:
        1. Objetivo A
        2. Objetivo B
        3. Objetivo C{OPTION_DELIMITER}1. Objetivo X
        2. Objetivo Y
        3. Objetivo Z
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.9)


# ---------------------------------------------------------------------------
# Step 11
# ---------------------------------------------------------------------------

REFERENCE_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "author": {"type": "string"},
            "source": {"type": "string"},
            "description": {"type": "string", "description": "Máximo 300 caracteres"},
            "relevance": {"type": "string"},
        },
        "required": ["name", "author", "source", "description", "relevance"],
        "additionalProperties": False,
    },
}


def reference_search_prompt(category: str, topic: str) -> PromptSpec:
    user_prompt = dedent(
        f"""
        Actúa como un bibliotecario de investigación experto. Para la categoría "{category}" dentro de un
        proyecto sobre "{topic}", encuentra exactamente dos referentes (proyectos, autores, teorías).

        Devuelve la respuesta en formato JSON.
        Prioriza fuentes como MIT Press Open, Dezeen, Core77, Behance, ArchDaily, Designboom e
        Interaction Design Foundation.
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.6)


def benchmark_prompt(results: Dict[str, List[Dict[str, Any]]], topic: str, *, iteration: bool) -> PromptSpec:
    if iteration:
        task = (
            "TAREA (iteración): itera sobre el análisis anterior ofreciendo una nueva perspectiva o "
            "profundizando en una de las brechas identificadas."
        )
    else:
        task = dedent(
            """
            TAREA: genera un análisis completo con esta estructura en HTML:
            1. Párrafo introductorio con las dimensiones de análisis (conceptual, técnica, estética...).
            2. Tabla comparativa (<table>) de los referentes en sus aspectos clave.
            3. Texto interpretativo con patrones, similitudes y diferencias; destaca lo clave con <strong>.
            4. Brechas identificadas: lista <ul> con cada brecha en <strong>.
            """
        )
    user_prompt = dedent(
        f"""
        Actúa como un analista estratégico de diseño. Has recopilado los siguientes referentes:
        {_pretty_json(results, "Sin referentes.")}
        Analiza el conjunto en relación al proyecto del estudiante sobre "{topic}".

        {task}

        Usa HTML simple, sin colores de fondo ni estilos complejos.
        """
    )
    return PromptSpec(user_prompt=user_prompt, max_tokens=3000)


# ---------------------------------------------------------------------------
# Steps 12-13
# ---------------------------------------------------------------------------


def proposal_intro_prompt(project: ProjectData) -> PromptSpec:
    benchmark = project.reference_analysis.benchmark if project.reference_analysis else ""
    user_prompt = dedent(
        f"""
        Actúa como un sintetizador de investigación experto. Genera un resumen muy sintético (2-3 frases)
        que destaque el léxico clave de los hallazgos para orientar al estudiante a escribir su propuesta
        de valor.

        Contexto:
        - Objetivo general: "{project.general_objective}"
        - Brecha de diseño identificada: "{strip_html(project.project_gap_analysis)}"
        - Conclusiones del análisis de referentes: "{strip_html(benchmark) or 'No disponible'}"

        Tarea: un párrafo introductorio conciso que integre estos elementos y marque con <strong> los
        conceptos que deberían guiar la propuesta de valor. El objetivo es dar léxico útil, no resumir todo.
        Usa HTML.
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.5, max_tokens=400)


PROPOSAL_INTRO_FALLBACK = (
    "<p>Después de analizar los referentes y definir tus objetivos, es momento de articular una propuesta de "
    "valor clara. Piensa en cómo tu proyecto puede aprovechar los vacíos y oportunidades identificados.</p>"
)


def proposal_prompt(project: ProjectData, value_proposition: str, *, iteration: bool) -> PromptSpec:
    reference_names = [ref.name for ref in project.reference_analysis.references] if project.reference_analysis else []
    iteration_note = (
        "Genera una variante con un pequeño ajuste o un enfoque levemente distinto a la vez anterior."
        if iteration
        else ""
    )
    user_prompt = dedent(
        f"""
        Actúa como un estratega de diseño y mentor. {_student(project)} completó una investigación previa y
        definió una propuesta de valor.
        Contexto previo:
        * Objetivo general: "{project.general_objective}"
        * Referentes analizados: {json.dumps(reference_names, ensure_ascii=False)}
        Propuesta de valor del estudiante:
        "{value_proposition}"

        Tarea{' (iteración)' if iteration else ''}: articula UNA ÚNICA propuesta de proyecto concisa y
        convincente que integre la propuesta de valor con el objetivo y los referentes. Máximo 140 palabras.
        {iteration_note}
        No uses títulos ni numeración.
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.9 if iteration else 0.7, max_tokens=500)


EVALUATION_RUBRIC = dedent(
    """
    1. Coherencia y pertinencia: ¿hay una línea clara entre problema, pregunta, hipótesis y objetivos?
    2. Fundamentación teórica: ¿el marco teórico y los referentes son sólidos y están bien articulados?
    3. Propuesta de valor e innovación: ¿la propuesta es clara, innovadora y responde a una oportunidad?
    4. Viabilidad y metodología: ¿el enfoque metodológico y el plan de trabajo son realistas?
    """
).strip()


def evaluation_prompt(project: ProjectData) -> PromptSpec:
    user_prompt = dedent(
        f"""
        Actúa como un evaluador académico senior de Taller de Título de Diseño. Evalúa el siguiente proyecto
        con la rúbrica oficial.
        Rúbrica:
        {EVALUATION_RUBRIC}

        Información del proyecto:
        {_pretty_json(project.as_prompt_json(), "{}")}

        Tarea: genera una tabla HTML (<table>, <tr>, <th>, <td>, <strong>) con dos columnas:
        "Criterio de evaluación" y "Comentarios (aspectos presentes y brechas de mejora)". Para cada uno de
        los 4 criterios entrega un comentario detallado con fortalezas y debilidades.
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.4, max_tokens=2500)


def improvement_gaps_prompt(evaluation_html: str, *, reprioritize: bool) -> PromptSpec:
    action = "re-prioriza y genera" if reprioritize else "genera"
    user_prompt = (
        f"Basado en esta evaluación en HTML: {evaluation_html}, {action} un resumen en un párrafo con las "
        "recomendaciones. Destaca los 2-3 aspectos clave en los que el estudiante debe enfocarse para "
        "fortalecer su proyecto. Usa HTML simple (<p>, <strong>)."
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.5, max_tokens=600)


# ---------------------------------------------------------------------------
# Steps 14-15
# ---------------------------------------------------------------------------


def key_activities_prompt(project: ProjectData) -> PromptSpec:
    gaps = project.project_evaluation.brechas if project.project_evaluation else ""
    user_prompt = dedent(
        f"""
        A partir del progreso del proyecto de un estudiante, lista las actividades clave que debería
        considerar para el próximo semestre.
        Contexto del proyecto:
        * Objetivos: {json.dumps(project.specific_objectives, ensure_ascii=False)}
        * Propuesta de proyecto: {project.project_proposal}
        * Brechas de la evaluación: {strip_html(gaps) or 'No identificadas'}
        Tarea: genera una lista HTML (<ul><li>) de actividades clave, específicas y accionables.
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.5, max_tokens=800)


SEMESTER_CALENDAR = dedent(
    """
    * Agosto: semanas 1-4
    * Septiembre: semanas 5-8
    * Octubre: semanas 9-12
    * Noviembre: semanas 13-16
    * Diciembre: semanas 17-19
    """
).strip()


def gantt_prompt(tasks: Sequence[WorkPlanTask], gaps: str) -> PromptSpec:
    task_lines = "\n".join(f'{task.id}. "{task.text}"' for task in tasks)
    user_prompt = dedent(
        f"""
        Actúa como un jefe de proyecto experto. El estudiante necesita un plan de trabajo tipo carta Gantt.
        Tareas principales definidas por el estudiante:
        {task_lines}

        Calendario académico (segundo semestre):
        {SEMESTER_CALENDAR}

        Tarea: genera una carta Gantt como tabla HTML para agosto a diciembre.
        * Columnas: la primera es "Tarea"; las siguientes son las semanas agrupadas por mes
          ("Ag-S1", "Ag-S2", ..., "Dic-S3").
        * Distribuye las tres tareas, sus subtareas lógicas y las actividades clave a lo largo de las semanas.
        * Marca las barras con un color de fondo en la celda (style="background-color: #dbeafe;"); el texto
          es siempre negro.

        Incluye además estas actividades, atendiendo a las brechas de la evaluación:
        - Iteraciones con usuarios (al menos 2)
        - Maquetería y prototipado (rápido, formal, funcional)
        - Definición tecnológica e insumos
        - Testeo y validación
        - Desarrollo de memoria/informe (principalmente en la segunda mitad)
        - Preparación de montaje y defensa final
        - Brechas de la evaluación: {strip_html(gaps) or 'N/A'}
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.4, max_tokens=4000)


REPORT_SECTIONS = [
    "Resumen / Abstract",
    "Introducción",
    "Motivación personal",
    "Marco teórico (desarrolla los conceptos con base en los referentes)",
    "Antecedentes generales",
    "Tema central",
    "Diseño aplicado",
    "Contribución",
    "Usuarios tipo y testimonios (basado en el User Persona)",
    "Fundamentación (pregunta, hipótesis, objetivos)",
    "Proyecto de creación (basado en la propuesta de proyecto)",
    "Desarrollo y prototipado",
    "Plan de trabajo (la carta Gantt va aquí, dentro del div indicado)",
    "Bibliografía (APA 7, de los referentes)",
    "Anexos (guía cuantitativa)",
    "Evaluación según rúbrica (basado en la evaluación)",
]


def final_report_prompt(project: ProjectData, *, robustify: bool, current_report: str = "") -> PromptSpec:
    quantitative_guide = (
        project.user_research_data.quantitative_guide if project.user_research_data else ""
    ) or "Guía no disponible."
    if robustify:
        task = dedent(
            f"""
            TAREA DE ROBUSTECIMIENTO: revisa el informe actual y reescríbelo completo mejorado. Enriquece el
            lenguaje, fortalece las conexiones entre secciones y cuida un tono impecable, respetando todas
            las instrucciones de formato.
            Informe actual:
            {current_report}
            """
        )
    else:
        task = "TAREA: genera el informe inicial siguiendo todas las instrucciones."
    index = "\n".join(f"{number}. {title}" for number, title in enumerate(REPORT_SECTIONS, start=1))
    user_prompt = dedent(
        f"""
        Actúa como un redactor académico experto. Genera un informe final de proyecto de título completo y
        coherente.
        Instrucciones generales:
        * Sintetiza, no copies: redacta cada sección con lenguaje académico fluido y transiciones lógicas.
        * Sigue exactamente el índice. Si falta información para una sección, indica "Pendiente de desarrollo".
        * HTML claro y profesional (<h1>, <h2>, <h3>, <p>, <ul>, <li>, <em>, <table>).
        * NO uses negritas (<strong> o <b>); usa <em> solo cuando sea estrictamente necesario.
        * En la sección 13 incluye la carta Gantt dentro de <div class="gantt-container-for-pdf">.
        * En la sección 15 incluye la guía de entrevista cuantitativa: {quantitative_guide}

        Datos del proyecto del estudiante:
        {_pretty_json(project.as_prompt_json(), "{}")}

        {task}

        Índice a seguir:
        {index}
        """
    )
    return PromptSpec(user_prompt=user_prompt, temperature=0.6, max_tokens=8000)
